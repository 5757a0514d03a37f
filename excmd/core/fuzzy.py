
import re


def fuzzy_regex(pattern):
    '''
    Build a regex matching any string that contains the characters of
    `pattern` in order. Each character is captured so that the match
    positions can be scored.
    '''
    if pattern:
        return re.compile('.*?' + '.*?'.join('(' + re.escape(c) + ')' for c in pattern),
                          re.DOTALL)
    else:
        return re.compile('')


class FuzzyMatcher(object):
    def __init__(self, pattern, case_sensitive=False):
        if not case_sensitive:
            pattern = pattern.lower()
        self.__pattern = pattern
        self.__case_sensitive = case_sensitive
        self.__regex = fuzzy_regex(pattern)

    def score(self, string):
        '''
        Return a score for `string`, higher being a better match, or None
        if the string does not match at all.

        Consecutive matched characters and matches at the start of the
        string or after a word separator are rewarded; gaps and unmatched
        trailing characters are penalized.
        '''
        if not self.__case_sensitive:
            string = string.lower()
        m = self.__regex.match(string)
        if m is None:
            return None
        if not self.__pattern:
            return 0

        score = 0
        prev = None
        for group in range(1, len(self.__pattern) + 1):
            pos = m.start(group)
            if prev is None:
                score -= pos * 3
            elif pos == prev + 1:
                score += 8
            else:
                score -= pos - prev - 1
            if pos == 0 or string[pos - 1] in '-_. /':
                score += 6
            prev = pos

        score -= len(string) - len(self.__pattern)
        return score

    def rank(self, items, key=None):
        '''
        Return ``(item, score)`` pairs for the matching items, best first.
        Items with equal scores keep their original order.
        '''
        if key is None:
            key = lambda x: x
        scored = []
        for item in items:
            s = self.score(key(item))
            if s is not None:
                scored.append((item, s))
        scored.sort(key=lambda pair: -pair[1])
        return scored


def fuzzy_match(pattern, items, case_sensitive=False):
    return FuzzyMatcher(pattern, case_sensitive).rank(items)
