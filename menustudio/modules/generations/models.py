# Supabase table: generations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- prompt: text (nullable)
- images: text[] (not null, default '{}') - data URLs or hosted URLs; can be large
- ratio: text (nullable) - "1:1", "16:9", "9:16", "4:3"
- resolution: text (nullable) - "1K", "2K", "4K"
- user_id: uuid (foreign key to auth.users.id, not null)
- organization_id: uuid (foreign key to organizations.id, nullable)
- created_at: timestamp (default: now())

Listing is split in two: metadata columns first, then `images` in small
batches, so history views never pull every image payload in one query.
"""
