from orderassist.models.session_entry import SessionEntry
