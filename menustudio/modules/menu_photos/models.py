# Supabase table: menu_photos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null) - file name without extension, renamable
- category: text (not null, default: 'Uploaded')
- original_url: text (not null) - public storage URL of the full image
- thumbnail_url: text (not null) - 400px JPEG thumbnail
- sort_order: integer (default: 0) - gallery order after drag-and-drop
- user_id: uuid (foreign key to auth.users.id, not null)
- organization_id: uuid (foreign key to organizations.id, nullable)
- deleted_at: timestamp (nullable) - soft delete marker; rows stay in trash for 30 days
- deleted_by: uuid (nullable) - who moved the photo to trash
- created_at: timestamp (default: now())

Storage bucket: menu-photos (public). Generated marketing images are
written under generated/ in the same bucket.
"""
