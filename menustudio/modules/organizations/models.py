# Supabase table: organizations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- slug: text (unique, not null)
- primary_color: text (default: '#ff6b35')
- logo_url: text (nullable)
- owner_id: uuid (foreign key to profiles.id, nullable)
- disabled: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

profiles.organization_id links a user to the organization whose data they see.
"""
