"""
Book Catalog Backend — Services Package
=======================================

What:  Query and mapping layer between route handlers and the database.
Why:   Keeps HTTP concerns out of data access so services can be tested
       with a mocked session.

Service Inventory:
    - category_service.py: Category CRUD and the category existence check
    - book_service.py:     Book CRUD and full-text search dispatch
    - book_mapper.py:      Row shapes and the book/category composition
"""
