"""tablemodel core -- errors, descriptors, protocols, logging and settings.

Architecture::

    errors.py       ModelError hierarchy
    descriptor.py   ModelDescriptor (immutable table metadata)
    protocols.py    ModelProtocol (entity contract)
    logging.py      structlog configuration
    settings.py     TableModelSettings (pydantic-settings)
"""
