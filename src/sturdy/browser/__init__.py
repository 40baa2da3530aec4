"""Browser backends and collaborator protocols.

``driver`` declares the protocols the waiter and interactions depend on.
``playwright_driver`` and ``capture`` implement them on Playwright's async
API; ``memory`` implements them in memory for tests.  ``helpers`` holds the
small element utilities shared by both layers.
"""
