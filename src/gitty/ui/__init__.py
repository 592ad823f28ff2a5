"""Interactive menu: pure controller and flows, Rich views and the Textual shell."""
