# Supabase table: styles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- prompt_modifier: text (not null) - snippet appended to generation prompts
- thumbnail_url: text (nullable)
- organization_id: uuid (nullable) - NULL means global (visible to every client)
- has_color_picker: boolean (default: false)
- category: text (default: 'Studio')
- status: text ('active' | 'inactive', default: 'active')
- is_default: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
