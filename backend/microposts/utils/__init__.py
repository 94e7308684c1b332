"""Pure helpers with no database access: pagination, email format, user display."""
