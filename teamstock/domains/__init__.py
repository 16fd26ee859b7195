# teamstock/domains/__init__.py
