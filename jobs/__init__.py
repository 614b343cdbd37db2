"""
Risk Replay - Jobs Module

This module contains offline jobs:
- run_risk_simulation: Replay a journal export through a risk policy

Reliability Level: Offline Job (Cold Path)
"""
