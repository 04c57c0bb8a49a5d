"""Domain layer - documents lifecycle and analysis contracts"""
