# Test factories: interface mocks and in-memory repositories
