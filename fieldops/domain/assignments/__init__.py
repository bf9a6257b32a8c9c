"""Assignments domain - binding schedules to field agents and tracking job status"""
