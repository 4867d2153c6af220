"""karinstall — assemble a Karaf runtime image from feature repositories and kars."""

__version__ = "0.1.0"
