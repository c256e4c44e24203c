"""
Field names the parser knows about.

Every name listed here is also a stop marker: a scalar value runs from its
``name:`` up to the next known name in the same record. Adding a component
field therefore means adding its name here, otherwise its declaration is
swallowed by the value before it.
"""

# Bracket-delimited, JSON-shaped values
JSON_FIELDS = ('images', 'items', 'steps', 'children', 'fallbackFrames')

SCALAR_FIELDS = (
    'backgroundImage', 'backgroundImageMobile', 'backgroundVideo', 'backgroundVideoMobile',
    'backgroundPosition', 'backgroundPositionMobile',
    'author', 'role', 'src', 'videoSrc', 'videoSrcMobile', 'caption', 'credit', 'alt',
    'fullWidth', 'variant', 'size', 'orientation', 'autoplay', 'controls', 'poster',
    'beforeImage', 'afterImage', 'beforeLabel', 'afterLabel', 'image',
    'height', 'heightMobile', 'speed', 'content', 'overlay', 'layout', 'columns',
    'interval', 'showDots', 'showArrows', 'stickyHeight',
    # Video player
    'videoId', 'videosIDs', 'id', 'skipDFP', 'autoPlay', 'startMuted', 'maxQuality',
    'quality', 'chromeless', 'isLive', 'live', 'allowRestrictedContent',
    'preventBlackBars', 'globoId', 'token', 'adAccountId', 'adCmsId', 'siteName',
    'width', 'textPosition', 'textPositionMobile', 'textAlign', 'textAlignMobile',
    # Header
    'title', 'subtitle', 'date', 'theme',
    'videoAspectRatio', 'showProgress', 'showTime', 'showControls',
    'padding', 'paddingMobile',
    # Frame sequences
    'totalFrames', 'preloadFrames', 'bufferSize', 'smoothTransition', 'lazyLoading',
    'posterImage',
)

# Scalars holding author-formatted text: normalized, never stripped
RICH_SCALAR_FIELDS = ('caption', 'credit', 'content', 'beforeLabel', 'afterLabel')

# --- Type-specific sets ---

VIDEO_SCROLL_TYPES = ('videoscrollytelling', 'video-scrollytelling', 'videoscrolly', 'video-scrolly')
VIDEO_SCROLL_FIELDS = (
    'frameStart', 'frameStop', 'imagePrefix', 'imageSuffix',
    'imagePrefixMobile', 'imageSuffixMobile', 'frameStartSeconds', 'frameStopSeconds',
    'scrollSmoothness', 'preloadFrames', 'frameRate', 'totalFrames', 'fullWidth',
)

SECTION_TYPES = ('section', 'secao', 'section-wrapper', 'wrapper')
SECTION_FIELDS = ('id', 'backgroundImage', 'backgroundImageMobile', 'height', 'padding')

HEADER_TYPES = ('header',)
HEADER_FIELDS = ('title', 'subtitle', 'author', 'date', 'theme')

TEXT_FIELD = 'text'
TYPE_FIELD = 'type'


def _all_names() -> tuple:
    names = []
    for group in (JSON_FIELDS, SCALAR_FIELDS, VIDEO_SCROLL_FIELDS, SECTION_FIELDS,
                  HEADER_FIELDS, (TEXT_FIELD, TYPE_FIELD)):
        for name in group:
            if name not in names:
                names.append(name)
    # Longest first so the alternation never settles for a prefix
    return tuple(sorted(names, key=len, reverse=True))


KNOWN_FIELDS = _all_names()
