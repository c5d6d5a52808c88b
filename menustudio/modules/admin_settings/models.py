# Supabase table: admin_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (single row):
- id: uuid (primary key)
- master_prompt: text (default: '') - prepended to every image generation prompt
- default_resolution: text (default: '1K') - "1K", "2K", "4K"
- default_ratio: text (default: '1:1') - "1:1", "16:9", "9:16", "4:3"
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
