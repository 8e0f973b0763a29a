"""
Mars Dashboard.

Shows NASA's Astronomy Picture of the Day and Mars rover photos through a
small proxy that keeps the NASA API key on the server.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

__version__ = "0.1.0"
__author__ = "Meir Miyara"
__email__ = "meir.miyara@gmail.com"
