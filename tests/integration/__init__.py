"""
Integration tests for loadspec.

Test components together:
- SpecParsingService with a mocked interpreter (interpret -> validate -> recover)
- Cascade fallback after classified interpreter failures
"""
