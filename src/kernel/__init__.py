"""
Kernel Layer

Foundational components shared by the API routes:
- Document store (users and projects collections)
- Identity Core (password hashing, bearer tokens, accounts)
- Project/author consistency sagas
- Contact lists

Invariant: every project's author lists the project's id in its projects,
unless a compensating step failed and was reported as InconsistentState.
"""
