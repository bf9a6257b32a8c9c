"""Audit domain - one record per successful mutation"""
