"""NeoDex: a Pokédex proxy (``catalog``) and its browser-side state and rendering layer (``client``)."""
