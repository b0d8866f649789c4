"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: ordered in-memory list, persisted through a key/value port
- timer_engine.py: per-second tick, single active timer, threshold alarms
- task_views.py: today / tomorrow / overdue / completed buckets + filters
- task_csv.py: CSV export/import
- cost.py: money and HH:MM:SS formatting
"""
