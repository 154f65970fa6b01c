"""kubectl runner and installer steps"""
