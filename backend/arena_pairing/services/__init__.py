"""
Services Layer

Pure business logic services that:
- Accept domain inputs (IDs, sessions, rosters)
- Return domain outputs (models, value objects)
- Do NOT depend on transport request/response objects
- Commit only on the mutating operations that are documented to write
"""
