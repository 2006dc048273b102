# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Profiles are created by the signup trigger; this service only reads them

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- display_name: text (nullable)
- gender: text (nullable) - values: male, female, other
- created_at: timestamp (default: now())

Gender is only used for the participant composition shown on quest markers.
"""
