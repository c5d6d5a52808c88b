# Analytics has no table of its own.
# Figures are aggregated on read from these Supabase tables:

"""
- profiles: id, email, display_name, organization_id (one row per client user)
- generations: user_id, organization_id, prompt, created_at
- menu_photos: user_id, organization_id, category, created_at, deleted_at

A client counts as active when it created a generation or uploaded a menu
photo in the last 7 days.
"""
