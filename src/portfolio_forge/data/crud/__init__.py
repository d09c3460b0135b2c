"""Repository functions over the ORM models; all take an open ``Session``."""
