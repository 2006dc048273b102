# Supabase Auth
# Accounts live in auth.users; nothing here owns a table.

"""
Sign up stores display_name and gender in user_metadata and mirrors them
into public.profiles (see app/modules/profiles/models.py), which is what the
quest board reads for creator names and participant composition.

Every quest board route and socket resolves its caller from the Supabase
access token: REST via the Authorization header, WebSockets via ?token=.
"""
