# Services package init
"""
Noteful Backend — Services Layer
==================================

What:  Business logic sitting between routes (HTTP) and repositories (persistence).
How:   Services receive the session factory and validated input records, apply
       the business rules, and return response models.

Service Inventory:
    - request_validation:   pure structural checks on bodies, paths and queries
    - OwnershipValidator:   folder/tag references must belong to the caller
    - CascadeCoordinator:   folder/tag delete with concurrent reference cleanup
    - NamedEntityService:   folder and tag CRUD
    - NoteService:          note CRUD and filtered listing
    - AuthService:          password hashing, login, bearer tokens
    - UserService:          registration
"""
