"""core/ -- Kernel layer (configuration). Imports nothing from api/ or auth/."""
