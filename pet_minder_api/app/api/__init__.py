"""
HTTP layer of the PetMinder API.

Routes are grouped per API version (currently only ``v1``); each
version exposes a single ``router`` that ``main.create_app`` mounts
under ``/api/<version>``.  Route handlers stay thin: they resolve the
caller and hand over to the service layer.
"""
