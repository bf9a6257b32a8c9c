"""Leads domain - prospective cleaning jobs and their workflow status"""
