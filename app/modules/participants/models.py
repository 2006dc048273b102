# Supabase tables: quest_participants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

quest_participants:
- id: uuid (primary key)
- quest_id: uuid (foreign key to quests.id, not null, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (quest_id, user_id)

The quest owner (quests.user_id) is a member without a row here.
"""
