from .overlay import OverlayRenderer, ArmSkeletonDrawer, limb_panel_lines
