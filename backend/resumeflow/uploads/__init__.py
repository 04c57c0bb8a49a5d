"""Resume upload API"""
