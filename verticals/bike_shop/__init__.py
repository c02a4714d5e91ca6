"""Bike shop vertical — configurable products.

Lets a customer assemble a bicycle from mutually dependent part choices:
- SQLAlchemy catalogue models (products, part types, options, rules, stock)
- Store protocols with async SQL implementations
- Pure-function compatibility, pricing and validation rules
- Resolver, inventory gate, pricing engine and validator behind one service
- Reservation unit of work for checkout
- FastAPI router
"""
