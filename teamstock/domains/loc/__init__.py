# teamstock/domains/loc/__init__.py
