# Tag store on top of filesystem extended attributes

import errno
import re

import xattr

from xtags import tagsutils

# attribute holding the comma-joined tag list of a path
DefaultTagsAttr = 'user.tags'

# errno for a missing attribute, ENOATTR on BSD and macOS
NoAttrErrno = getattr(errno, 'ENOATTR', errno.ENODATA)


class TagStoreException(Exception):
    def __init__(self, msg):
        Exception.__init__(self, msg)
        self.msg = msg


class TagEncodingException(TagStoreException):
    def __init__(self, msg, path):
        TagStoreException.__init__(self, msg)
        self.path = path


class TagPatternException(TagStoreException):
    def __init__(self, msg, pattern):
        TagStoreException.__init__(self, msg)
        self.pattern = pattern


class InvalidTagException(TagStoreException):
    def __init__(self, msg, tag):
        TagStoreException.__init__(self, msg)
        self.tag = tag


class TagStore:
    """
    Reads and writes the tags of paths.

    The tags of a path live in one extended attribute as a comma-joined
    string. Every operation is a plain read-modify-write with no locking, so
    two processes updating the same path at once can lose an update.
    """

    def __init__(self, logger, attr=DefaultTagsAttr):
        self.logger = logger
        self.attr = attr

    def read_raw(self, path):
        """Attribute bytes of path, or None if the attribute is not set."""
        try:
            data = xattr.get(path, self.attr)
        except OSError as e:
            if e.errno == NoAttrErrno:
                return None
            raise
        self.logger.debug('read ' + path + ': ' + repr(data))
        return data

    def write_raw(self, path, data):
        self.logger.debug('write ' + path + ': ' + repr(data))
        xattr.set(path, self.attr, data)

    def remove_raw(self, path, missing_ok=False):
        self.logger.debug('remove ' + path)
        try:
            xattr.remove(path, self.attr)
        except OSError as e:
            if missing_ok and e.errno == NoAttrErrno:
                return
            raise

    def get_tags_string(self, path):
        data = self.read_raw(path)
        if not data:
            return None
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError:
            raise TagEncodingException(
                'tags of ' + path + ' are not valid utf-8', path)

    def get_tags(self, path):
        return tagsutils.parse(self.get_tags_string(path))

    def set_tags(self, path, tags):
        """
        Add tags to path, lower-cased and skipping those already stored.
        Returns the stored tag list.
        """
        for tag in tags:
            reason = tagsutils.check_tag(tag)
            if reason is not None:
                raise InvalidTagException(
                    'invalid tag ' + repr(tag) + ': ' + reason, tag)
        stored = self.get_tags(path)
        for tag in tags:
            tag = tagsutils.normalize(tag)
            if tag not in stored:
                stored.append(tag)
        self.write_raw(path, tagsutils.serialize(stored).encode('utf-8'))
        return stored

    def remove_tags(self, path, tags):
        """
        Drop every stored tag equal to one of tags and return what is left.

        Tags are compared as given, without lower-casing, so 'FOO' does not
        remove a stored 'foo'. The remaining list is written back in one
        overwrite, leaving an empty attribute when nothing is left.
        """
        stored = [t for t in self.get_tags(path) if t not in tags]
        self.write_raw(path, tagsutils.serialize(stored).encode('utf-8'))
        return stored

    def find_tags(self, path, tags, literal=False):
        """
        Search path and everything below it for stored tags matching any of
        tags, which are regular expressions unless literal is set.

        Returns an iterator of (path, matches) for each entry with at least
        one match. With no tags every tagged entry is returned with all its
        tags. Entries that can not be read are skipped.
        """
        try:
            pattern = tagsutils.build_pattern(tags, literal)
        except re.error as e:
            pattern = '|'.join(tags)
            raise TagPatternException(
                'bad pattern ' + repr(pattern) + ': ' + str(e), pattern)
        return self.__find(path, pattern)

    def __find(self, top, pattern):
        for path in tagsutils.walk_paths(top, self.logger):
            if not tagsutils.is_text_path(path):
                self.logger.debug('find: skip non-text path ' + repr(path))
                continue
            try:
                tags_string = self.get_tags_string(path)
            except OSError as e:
                self.logger.debug('find: skip ' + path + ': ' + str(e))
                continue
            if tags_string is None:
                continue
            matches = tagsutils.find_matches(pattern, tags_string)
            if matches:
                yield (path, matches)
