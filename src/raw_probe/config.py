"""
Raw Probe 配置文件
包含文件格式、通道顺序、统计校准常量和 DPRAW 选项定义
"""

# ==========================================
#           文件格式配置
# ==========================================

# 相机 RAW 扩展名 (小写)，通过 rawpy 读取
SUPPORTED_RAW_EXTENSIONS = [
    '.dng', '.cr2', '.cr3', '.nef', '.arw', '.rw2', '.raf', '.orf', '.pef', '.srw'
]

# 可写入的格式
WRITE_FORMATS = ['.dat', '.pgm', '.ppm', '.tif', '.tiff']

# PGM 头部解析时读取的最大字节数
PGM_HEADER_BYTES = 64

# ==========================================
#           通道与 CSV 输出
# ==========================================

# 单色 Bayer 位置的固定输出顺序
CSV_CHANNEL_ORDER = ['R', 'G1', 'G2', 'B']
CSV_DELIMITER = ';'

# 命令行可选择的通道
CHANNEL_NAMES = ['R', 'G1', 'G2', 'G', 'B', 'ALL']

# ==========================================
#           统计校准常量
# ==========================================
# 以下常量为经验值，保持原样，后续可能根据实测重新标定

# 高光检测: threshold = total / HIGHLIGHT_THRESHOLD_DIVISOR
HIGHLIGHT_THRESHOLD_DIVISOR = 10000

# 自动电平: 升序扫描时跳过的最低取值个数
AUTO_LEVELS_SKIP_LOW = 8
# 自动电平: 降序扫描的最大取值个数
AUTO_LEVELS_TOP_WINDOW = 128
# 自动电平: 尖峰/剪切判定倍数
AUTO_LEVELS_SPIKE_FACTOR = 16

# 遮光区安全边界 (逻辑像素): 子采样方向 / 全采样方向
MASK_SAFETY_SUBSAMPLED = 2
MASK_SAFETY_FULL = 4

# ==========================================
#           DPRAW 配置
# ==========================================

DPRAW_ACTIONS = ['geta', 'blend']
DPRAW_MODES = ['plain', 'bayer']

DEFAULT_DPRAW_ACTION = 'geta'
DEFAULT_DPRAW_MODE = 'plain'

# ==========================================
#           电平估计 & 快速预览
# ==========================================

LEVEL_METHODS = ['highlights', 'auto']
DEFAULT_LEVEL_METHOD = 'highlights'

# 16-bit 输出满量程
FULL_SCALE = 65535

# 伽马查找表大小
GAMMA_TABLE_SIZE = 65536
GAMMA_FUNCTION = 'sRGB'
