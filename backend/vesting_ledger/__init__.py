"""Equity vesting ledger"""
