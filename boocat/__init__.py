"""
boocat: web forms and lists for author and book records.
"""
