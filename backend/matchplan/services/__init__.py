"""
Services Layer

Scheduling engine entry points, metrics, auditing and run storage:
- Engine services take plain dataclasses and never touch the database
- Only schedule_store reads or writes SQLModel rows
- Nothing here knows about HTTP request/response objects
"""
