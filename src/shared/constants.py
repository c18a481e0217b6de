# --- Web Mercator
# Latitude limit of the square Web Mercator world (degrees)
MERCATOR_LAT_LIMIT_DEG = 85.0511
# Longitude limits (degrees)
WORLD_LNG_MIN_DEG = -180.0
WORLD_LNG_MAX_DEG = 180.0
WORLD_LNG_SPAN_DEG = 360.0
WORLD_LNG_HALF_SPAN_DEG = 180.0
# Highest zoom whose tile count still fits a 32-bit index
MAX_ZOOM = 31
MIN_ZOOM = 0
# Ground resolution at the equator for zoom 0 with 256 px tiles (m/px)
EQUATOR_RESOLUTION_M_PER_PX = 156543.034

# --- Tile cache layout
# Tile file name; stable across runs since it doubles as the existence check
TILE_FILE_TEMPLATE = 'x{x}_y{y}_z{z}.jpg'
# Default cache directory (relative paths resolve under the user profile)
TILE_CACHE_DIR = 'mapscache'
# Application directory name under LOCALAPPDATA
APP_DIR_NAME = 'SatTiles'
# Fallback directory in the home folder
HOME_DIR_NAME = '.sattiles'
# Suffix of in-progress tile writes
TILE_TMP_SUFFIX = '.part'

# --- Loader defaults
# Tile rings around the center tile
DEFAULT_BLOCK_RADIUS = 2
# Parallel HTTP requests per start()
DOWNLOAD_CONCURRENCY = 8
# Default tile source
DEFAULT_TILE_SOURCE = 'https://tile.openstreetmap.org/{z}/{x}/{y}.png'

# --- HTTP
HTTP_TIMEOUT_DEFAULT = 20.0
HTTP_USER_AGENT = 'SatTiles/1.0 (python-aiohttp)'

# --- Failure reasons reported per tile
FAILURE_HTTP_STATUS = 'http-status'
FAILURE_TRANSPORT = 'transport'
FAILURE_WRITE = 'write'
FAILURE_OFFLINE = 'offline'
# Anything raised while resolving a tile that is not covered above
FAILURE_ERROR = 'error'

# --- Profiles
PROFILE_SUFFIX = '.toml'
PROFILES_DIR_NAME = 'profiles'

# --- Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
