# Supabase tables: quest_messages, quest_message_reads
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

quest_messages:
- id: uuid (primary key)
- quest_id: uuid (foreign key to quests.id, not null, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, not null) - sender
- content: text (not null)
- created_at: timestamp (default: now())

quest_message_reads:
- id: uuid (primary key)
- message_id: uuid (foreign key to quest_messages.id, not null, on delete cascade)
- quest_id: uuid (foreign key to quests.id, not null) - lets realtime filter by quest
- user_id: uuid (foreign key to auth.users.id, not null) - reader
- read_at: timestamp (default: now())
- unique constraint on (message_id, user_id)

RLS: select/insert only for members of the quest (owner or participant).
Messages are never edited.
"""
