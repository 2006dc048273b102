# Supabase tables: quests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

quests:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to auth.users.id, not null) - owner/creator
- title: text (not null)
- category: text (not null) - values: food, study, fitness, errands, others
- date: date (not null)
- start_time: time (not null) - HH:MM
- end_time: time (not null) - HH:MM, may be <= start_time for an overnight quest
- details: text (nullable)
- location: text (not null) - free-text address as typed by the owner
- latitude: double precision (not null) - resolved once at creation
- longitude: double precision (not null)
- created_at: timestamp (default: now())

RLS: insert with user_id = auth.uid(); delete only where user_id = auth.uid().
Quests are never updated after creation.
"""
