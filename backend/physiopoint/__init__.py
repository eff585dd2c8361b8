"""PhysioPoint rehabilitation motion analysis backend."""
