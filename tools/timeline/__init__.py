"""
Timeline operations — one TimelineTool subclass per MCP tool.

Tracks:  add_track, list_tracks, remove_track
Events:  add_scheduled_event, list_scheduled_events,
         update_scheduled_event, remove_scheduled_event
"""
