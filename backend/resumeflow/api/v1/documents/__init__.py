"""Document API - list, retrieve, cancel and delete resumes"""
