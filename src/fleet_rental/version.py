"""Version metadata for FleetRental."""

__app_name__ = "FleetRental"
__company__ = "Gestão Inteligente"
__version__ = "1.0.0"
