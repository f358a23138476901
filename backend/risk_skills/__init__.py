"""
SentinelZero risk skills.

Each skill ships a ``definition`` module (models, exceptions) and an
``impl`` module (logic), re-exported from the skill package.
"""
