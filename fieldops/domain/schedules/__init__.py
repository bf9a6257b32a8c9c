"""Schedules domain - calendar bookings for confirmed leads"""
