"""
Beaten Games application package.

Introduces a layered architecture:

  app/records.py     - the ``Game`` entity and its optional fields.
  app/errors.py      - the error hierarchy, each error carrying its HTTP status.
  app/repositories/  - pure I/O: reading and writing rows through SQLAlchemy.
  app/services/      - business logic: form parsing, validation, domain rules.

Route handlers in ``beaten_web.py`` build the services in ``initialize()``
and call them directly, giving a clean separation between the HTTP layer and
the domain.
"""
