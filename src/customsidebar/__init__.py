"""customsidebar - Per-page navigation sidebars from wiki outlines."""
