"""Agents domain - field agent profiles"""
