"""
Todo persistence core.

Repository contract with relational and in-memory implementations, the
connection pool and migration steps that assemble the relational one, and
the mapping between wire models and stored entities. The FastAPI app lives
in ``todo_api.main``.
"""
