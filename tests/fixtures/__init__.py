"""
Test fixtures for loadspec.

Contains sample data for testing:
- valid_interpreter_response.json: Interpreter output conforming to the LoadTestSpec schema
- descriptions.json: Free-form descriptions covering each extraction tier
"""
