# Accounts live in Supabase Auth (auth.users); this module adds no tables of its own.
#
# Tables read here, owned by the database migrations:
# - profiles: id (= auth user id), email, display_name, organization_id
# - user_roles: user_id, role; queried only through has_role()

"""
has_role(_user_id uuid, _role text) -> boolean

The only role checked is `super_admin`. It unlocks the admin panel
(organizations, styles, settings, trash) and the X-Organization-Override
header that lets an admin view a client's app as that organization.

A sign-up creates the profiles row through a database trigger, so a new
user has no organization until an admin creates one with them as owner.
"""
