"""
Calendar View Module

This module provides the core logic of the appointment calendar:
- Date keys (date_keys.py)
- Month/week/day grid generation (matrix.py)
- Appointment lookup by day (appointment_index.py)
- Timeline slots (timeline.py)
- Overlap resolution for simultaneous appointments (overlap.py)
- View state and render model (controller.py)
"""
