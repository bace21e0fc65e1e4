"""Test fixtures for the terminal server.

- trees: small file trees with known contents
- sessions: sessions and recording viewer channels
- api: TestClient wired to a fresh session
"""
