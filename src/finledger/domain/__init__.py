"""Domain layer for finledger application.

Services are imported from their modules (``finledger.domain.account`` etc.);
this package does not import them eagerly so the database layer can import
``finledger.domain.entities`` without a cycle.
"""
