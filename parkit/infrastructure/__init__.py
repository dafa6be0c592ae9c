"""Infrastructure layer: repositories and database setup"""
