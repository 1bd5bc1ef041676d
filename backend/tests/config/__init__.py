# Test configuration helpers
