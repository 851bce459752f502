"""
Operations Layer

This package provides business logic operations that compose database methods
for the Elo challenge workflows.

Architecture:
- Database layer: Pure data access for players and pending challenges
- Operations layer: Registration, rating lookup and the challenge state machine
- Command layer: Discord integration and user interface

Each operations module focuses on a specific domain:
- PlayerOperations: Registration and rating lookup
- ChallengeOperations: Challenge proposal, confirmation and Elo updates
"""
