"""Service layer — lifecycle operations returning ServiceResult."""
