import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '4000'))
    # Comma separated; '*' allows any origin (control and visual screens are on the LAN)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    # Game rules
    DEFAULT_PLAYER_HP = int(os.environ.get('DEFAULT_PLAYER_HP', '30'))
    DEFAULT_BOSS_NAME = os.environ.get('DEFAULT_BOSS_NAME', 'Riddlebeast')
    BOSS_AOE_DAMAGE = int(os.environ.get('BOSS_AOE_DAMAGE', '2'))
    PVP_DAMAGE = int(os.environ.get('PVP_DAMAGE', '5'))
    RESURRECTION_HP = int(os.environ.get('RESURRECTION_HP', '10'))
    MAX_HISTORY = int(os.environ.get('MAX_HISTORY', '20'))
    # Animation pacing (ms) between broadcast sub-steps. 0 disables the pause.
    ACTION_FLASH_MS = int(os.environ.get('ACTION_FLASH_MS', '350'))
    DISARM_FLASH_MS = int(os.environ.get('DISARM_FLASH_MS', '400'))
    ABILITY_FLASH_MS = int(os.environ.get('ABILITY_FLASH_MS', '600'))
    STUN_SKIP_MS = int(os.environ.get('STUN_SKIP_MS', '800'))
    ROUND_PAUSE_MS = int(os.environ.get('ROUND_PAUSE_MS', '300'))
    AOE_HIT_MS = int(os.environ.get('AOE_HIT_MS', '600'))
