# Tag string utilities

import os
import re

TagSeparator = ','


def parse(raw):
    """Split a stored tag string into its tags, in stored order."""
    if not raw:
        return []
    return raw.split(TagSeparator)


def serialize(tags):
    return TagSeparator.join(tags)


def normalize(tag):
    return tag.lower()


def check_tag(tag):
    """
    Return None if tag can be stored, or a reason string if it can not.

    A comma would split the tag on the next read and an empty tag would
    leave an empty token in the stored list.
    """
    if tag == '':
        return 'empty tag'
    if TagSeparator in tag:
        return 'tag contains ' + repr(TagSeparator)
    return None


def build_pattern(tags, literal=False):
    """
    Compile the alternation 'tag1|tag2|...' used by find.

    Tags are regular expressions unless literal is set, so 'wo.k' matches a
    stored 'work'. Returns None when there are no tags. Raises re.error on a
    malformed pattern.
    """
    if not tags:
        return None
    if literal:
        tags = [re.escape(t) for t in tags]
    return re.compile('|'.join(tags))


def find_matches(pattern, tags_string):
    """
    All non-empty substrings of tags_string matched by pattern, in order.
    A None pattern matches every stored tag.
    """
    if pattern is None:
        return parse(tags_string)
    return [m.group(0) for m in pattern.finditer(tags_string) if m.group(0)]


def is_text_path(path):
    # os.listdir hands back undecodable names as surrogate escapes
    try:
        path.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


def walk_paths(top, logger=None):
    """
    Yield top and every path below it, depth first, parents before children.

    Names inside a directory are visited in sorted order. top is followed if
    it is a symlink to a directory; a symlinked directory below top is
    yielded but not descended into. Directories that can not be listed are
    skipped.
    """
    yield top
    if not os.path.isdir(top):
        return
    # pending paths, next one last
    stack = _list_children(top, logger)
    while stack:
        path = stack.pop()
        yield path
        if os.path.isdir(path) and not os.path.islink(path):
            stack.extend(_list_children(path, logger))


def _list_children(dirpath, logger):
    try:
        names = sorted(os.listdir(dirpath), reverse=True)
    except OSError as e:
        if logger is not None:
            logger.debug('walk: skip ' + dirpath + ': ' + str(e))
        return []
    return [os.path.join(dirpath, name) for name in names]
