def format_size(size):
    """将字节转换为易读格式 (KB, MB)"""
    power = 2**10
    n = 0
    power_labels = {0: '', 1: 'K', 2: 'M', 3: 'G', 4: 'T'}
    size = size or 0
    while size > power and n < 4:
        size /= power
        n += 1
    return f"{size:.1f} {power_labels[n]}B"
